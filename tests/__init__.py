"""
Test suite for the pool chemistry MCP server.

Organization:
- test_csv_loaders.py - Target band table loading
- test_dosage_coefficients_db.py - Coefficient YAML loading
- test_range_classifier.py - Live in/out/unknown classification
- test_dosage_formulas.py - Per-parameter dosage formulas
- test_recommendation_engine.py - Aggregation, ordering, balanced result
- test_calculation_record.py - Record payload and store hand-off
- test_chemistry_tools.py - Tool functions (classify, recommend, instruction)
- test_reference_scenarios.py - Field scenario regression set
- test_server_tools.py - MCP wrappers via FastMCP Client

Run with:
    pytest tests/
    pytest tests/ --cov=core --cov=tools --cov=utils
"""
