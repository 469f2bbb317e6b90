# smallcrypt Test Suite
"""
Test suite including:
- Known-answer tests (FIPS 180 and the Twofish paper)
- Property tests (round trips, incremental hashing)
- Misuse tests (invalid inputs, use after finish, size limit)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
