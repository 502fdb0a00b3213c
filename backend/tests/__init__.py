"""
Test Suite

Tests for the Admissions Workflow Engine backend.

Structure:
    tests/
    ├── conftest.py                     # Fixtures (in-memory store, graph builders)
    ├── test_condition_evaluator.py     # Operator semantics
    ├── test_document_store.py          # In-memory store queries and rollback
    ├── test_mongo_document_store.py    # MongoDB adapter (mocked driver)
    ├── test_workflow_repository.py     # Atomic graph writes and reads
    ├── test_graph_validator.py         # Structural validation
    ├── test_transition_engine.py       # Transition resolution and history
    ├── test_workflow_service.py        # Activation rules and templates
    ├── test_api.py                     # HTTP routes
    ├── test_scripts.py                 # Seed and validation report scripts
    └── test_utils.py                   # Id and timestamp helpers

To run tests:
    pytest
    pytest backend/tests/test_transition_engine.py -v
"""
