"""
Cross-app test suite for the AgriConnect marketplace backend.

Test Organization:
- integration/ - Multi-role API flows (checkout to delivery, delivery to rating)
- App-specific tests remain in their respective app directories (e.g., marketplace/tests.py)
"""
