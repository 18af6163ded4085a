"""Decoder configuration."""
import json
import os

from typedqs.modes import Mode, ParseMode

DEFAULTS = {
    "QUERYSTRING_MODE": ParseMode.URLENCODED.value,
    "QUERYSTRING_SEPARATOR": ",",
    "QUERYSTRING_DENY_UNKNOWN_FIELDS": False,
    "QUERYSTRING_MAX_LENGTH": None,
    "DEBUG": False,
}


class Config(dict):
    """A dict of settings for decoding query strings from requests.

    Starts from :data:`DEFAULTS` and can be updated from mappings, objects
    and prefixed environment variables, the same way a Flask app config is.
    Keys are uppercase by convention.
    """

    def __init__(self, defaults=None):
        super().__init__(DEFAULTS)
        if defaults:
            self.from_mapping(defaults)

    def from_mapping(self, mapping=None, **kwargs):
        """Update config from a mapping or keyword arguments.

        Returns True (for consistency with Flask).
        """
        if mapping is not None:
            if hasattr(mapping, "items"):
                for key, value in mapping.items():
                    self[key] = value
            else:
                for key, value in mapping:
                    self[key] = value
        for key, value in kwargs.items():
            self[key] = value
        return True

    def from_object(self, obj):
        """Update config from an object's uppercase attributes.

        The object can be a module, a class, an import path string, or any
        object with attributes. Only UPPERCASE names are loaded.
        """
        if isinstance(obj, str):
            import importlib
            obj = importlib.import_module(obj)
        for key in dir(obj):
            if key.isupper():
                self[key] = getattr(obj, key)
        return True

    def from_prefixed_env(self, prefix="TYPEDQS", loads=json.loads):
        """Update config from environment variables with the given prefix.

        ``TYPEDQS_QUERYSTRING_MODE=brackets`` sets ``QUERYSTRING_MODE``.
        Values go through ``loads`` first; if that fails the raw string is
        kept.
        """
        prefix = prefix + "_"
        plen = len(prefix)
        for key, value in sorted(os.environ.items()):
            if not key.startswith(prefix):
                continue
            try:
                value = loads(value)
            except ValueError:
                pass
            self[key[plen:]] = value
        return True

    def get_namespace(self, namespace, lowercase=True, trim_namespace=True):
        """Return a dict of config keys that start with the given namespace.

        ``get_namespace("QUERYSTRING_")`` returns ``{"mode": ..., ...}``.
        """
        result = {}
        for key, value in self.items():
            if not key.startswith(namespace):
                continue
            if trim_namespace:
                key = key[len(namespace):]
            if lowercase:
                key = key.lower()
            result[key] = value
        return result

    def mode(self):
        """Build the :class:`~typedqs.modes.Mode` this config selects."""
        name = self["QUERYSTRING_MODE"]
        if isinstance(name, Mode):
            return name
        try:
            kind = ParseMode(str(name).lower())
        except ValueError:
            choices = ", ".join(m.value for m in ParseMode)
            raise ValueError(
                f"Unknown QUERYSTRING_MODE {name!r}, expected one of {choices}"
            ) from None
        if kind is ParseMode.DELIMITER:
            return Mode.delimiter(self["QUERYSTRING_SEPARATOR"])
        return Mode(kind)

    def __repr__(self):
        return f"<Config {dict.__repr__(self)}>"
