"""HTTP application for the process metrics exporter"""
