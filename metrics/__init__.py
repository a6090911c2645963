"""Metric models, schema, registry and exporters"""
