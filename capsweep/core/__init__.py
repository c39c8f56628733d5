"""Core Application Layer: Orchestrates the run.

Connects the domain layer with the infrastructure layer through interfaces.
Contains the collector, the batch deleter, the run orchestrator and the
command handler.
"""
