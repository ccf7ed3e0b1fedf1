"""
Test Fixtures

Synthetic rows for the four source workbooks and a stand-in for the Excel
loader. All test data is synthetic and does not contain real financial
information.
"""
