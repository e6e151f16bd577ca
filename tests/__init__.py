# OrderDesk API Test Suite
#
# End-to-end API flows (pytest + httpx) run against the Flask app in-process.
#
# Run with: python -m pytest tests -m smoke
