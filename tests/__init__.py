"""Test suite for formstate.

This package contains tests for:
- Rule evaluation and option schemas
- Field registry lifecycle and lazy unregistration
- Dirty tracking
- Validation scheduling per mode
- Submission pipeline
- Status store and event emission
- Element resolution
- End-to-end form scenarios
"""
