import subprocess

import pytest


class FakeRunner:
    """Stands in for run_cmd: records commands, answers from a table."""

    def __init__(self, responses=None, default=(0, "", "")):
        self.calls = []
        self.responses = responses or {}
        self.default = default

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        for prefix, (rc, out, err) in self.responses.items():
            if tuple(cmd[:len(prefix)]) == prefix:
                return subprocess.CompletedProcess(cmd, rc, out, err)
        rc, out, err = self.default
        return subprocess.CompletedProcess(cmd, rc, out, err)


class RecordingSettings:
    """In-memory settings store with the GSettings interface."""

    def __init__(self, fail_keys=(), schemas=None, keys=None):
        self.values = {}
        self.writes = []
        self.fail_keys = set(fail_keys)
        self.schemas = schemas
        self.keys = keys or {}

    def set(self, schema, key, value):
        self.writes.append((schema, key, value))
        if (schema, key) in self.fail_keys:
            return False
        self.values[(schema, key)] = value
        return True

    def set_try(self, schema, key, value):
        if self.schemas is not None and schema not in self.schemas:
            return False
        return self.set(schema, key, value)

    def get(self, schema, key):
        value = self.values.get((schema, key))
        return None if value is None else str(value)

    def has_key(self, schema, key):
        return key in self.keys.get(schema, ())


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def settings():
    return RecordingSettings()
