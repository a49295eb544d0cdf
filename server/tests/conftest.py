"""Global test fixtures."""

import os

import logfire

# Set the signing secret before any test module builds a Config
# This must happen at module load time, not in a fixture
os.environ.setdefault("TESSERA_AUTH__JWT__SECRET", "test-secret-for-unit-tests-min-32")

# Spans are recorded locally and never exported
logfire.configure(send_to_logfire=False, console=False)
