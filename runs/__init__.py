"""
Runnable Scripts for forecast ingestion

This directory contains scripts that can be run manually to ingest forecast runs.

Workflow:
1. python runs/ingest_metno.py nordic_pp    - Ingest the latest MET Norway run

The same ingestion runs every hour in backend/worker/scheduler.py.
"""
