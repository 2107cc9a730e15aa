"""Workflow orchestration for quartermaster."""
