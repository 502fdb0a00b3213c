"""Workflow Engine - Condition evaluation, validation and transitions"""
from .condition_evaluator import ConditionEvaluator
from .graph_validator import GraphValidator
from .history_writer import HistoryWriter
from .transition_engine import TransitionEngine

__all__ = [
    "ConditionEvaluator",
    "GraphValidator",
    "HistoryWriter",
    "TransitionEngine",
]
