"""Unified command-line interface for quartermaster.

Usage:
    qm candidates [--query Q] [--recipient ID] [--receipt ID]
    qm compose --recipient ID [--item ID ...] [--quantity GROUP[@LOCATION]=N ...]
    qm compose --receipt ID --recipient ID ...
"""
