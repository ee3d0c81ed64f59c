"""
GSettings Engine — Reads and writes GNOME configuration keys.
Wraps the `gsettings` CLI. Writes are fire-and-forget: failures are
logged and reported as False, never raised.
"""

import logging

from theming.commands import run_cmd

log = logging.getLogger(__name__)


def format_value(value):
    """Render a Python value as GVariant text for `gsettings set`."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


class GSettings:
    """Best-effort access to the GSettings store."""

    def __init__(self, runner=run_cmd, dry_run=False):
        self.runner = runner
        self.dry_run = dry_run
        self._schemas = None
        self._keys = {}

    def list_schemas(self):
        if self._schemas is None:
            result = self.runner(["gsettings", "list-schemas"])
            if result.returncode != 0:
                log.warning("list_schemas_failed err=%s", result.stderr.strip())
                return set()
            self._schemas = {line.strip() for line in result.stdout.splitlines() if line.strip()}
        return self._schemas

    def schema_exists(self, schema):
        return schema in self.list_schemas()

    def list_keys(self, schema):
        if schema not in self._keys:
            result = self.runner(["gsettings", "list-keys", schema])
            if result.returncode != 0:
                return set()
            self._keys[schema] = {k.strip() for k in result.stdout.splitlines() if k.strip()}
        return self._keys[schema]

    def has_key(self, schema, key):
        return key in self.list_keys(schema)

    def writable(self, schema, key):
        result = self.runner(["gsettings", "writable", schema, key])
        return result.returncode == 0 and result.stdout.strip() == "true"

    def get(self, schema, key):
        """Return the raw GVariant text of a key, or None if it can't be read."""
        result = self.runner(["gsettings", "get", schema, key])
        if result.returncode != 0:
            log.debug("setting_read_failed schema=%s key=%s err=%s", schema, key, result.stderr.strip())
            return None
        return result.stdout.strip()

    def set(self, schema, key, value):
        """Write a key unconditionally. Returns True on success."""
        text = format_value(value)
        if self.dry_run:
            print(f"  → [dry-run] {schema} {key} = {text}")
            return True
        result = self.runner(["gsettings", "set", schema, key, text])
        if result.returncode != 0:
            log.warning(
                "setting_failed schema=%s key=%s err=%s",
                schema, key, (result.stderr or "").strip(),
            )
            return False
        log.debug("setting_written schema=%s key=%s value=%s", schema, key, text)
        return True

    def set_try(self, schema, key, value):
        """Write a key only if its schema is installed and the key is writable."""
        if not self.schema_exists(schema):
            log.info("setting_skipped schema=%s key=%s reason=missing-schema", schema, key)
            return False
        if not self.writable(schema, key):
            log.info("setting_skipped schema=%s key=%s reason=read-only", schema, key)
            return False
        return self.set(schema, key, value)
