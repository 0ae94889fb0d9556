"""Data pipelines, one subpackage per data provider"""
