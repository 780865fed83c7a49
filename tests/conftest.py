"""Pytest configuration for Juno Outreach tests."""

# Ensure project root is on sys.path for imports during pytest collection
import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from juno.profile import Profile  # noqa: E402


@pytest.fixture
def empty_profile():
    return Profile()


@pytest.fixture
def full_profile():
    return Profile(
        name="Jane Doe",
        email="jane@example.com",
        phone="+1 555 0100",
        portfolio="https://jane.design",
        linkedin="https://linkedin.com/in/janedoe",
        figma="https://figma.com/@janedoe",
        resume_link="https://jane.design/resume.pdf",
        bio="recent design graduate with a love for clean interfaces",
    )
