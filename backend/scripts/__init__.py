"""
Backend Scripts Module

Utility scripts for database setup and workflow maintenance.

Available scripts:
    - seed_data.py: Creates the default admissions workflows
    - validate_workflow.py: Prints a validation report for one workflow

Usage:
    python -m scripts.seed_data --activate
    python -m scripts.validate_workflow WF-xxxxxxxxxxxx
"""
