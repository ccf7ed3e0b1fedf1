"""
Test Suite for Spendsight

Test Structure:
- fixtures/: Synthetic workbook rows and an in-memory workbook source
- unit/: Unit tests mirroring src/ package structure
- integration/: Excel loader, CLI and HTTP API tests

Test Data:
All test data is synthetic. Real banking exports are never included in tests.
"""
