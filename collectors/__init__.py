"""Metric collectors"""
