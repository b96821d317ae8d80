"""Built-in SLO processors."""

from slorules.plugins.core import alert_rules, debug, metadata_rules, noop, sli_rules, validate

PLUGINS = [validate, sli_rules, metadata_rules, alert_rules, noop, debug]

# Default chain run for every SLO unless it overrides the default plugins.
DEFAULT_PLUGIN_IDS = [
    validate.PLUGIN_ID,
    sli_rules.PLUGIN_ID,
    metadata_rules.PLUGIN_ID,
    alert_rules.PLUGIN_ID,
]

__all__ = ["PLUGINS", "DEFAULT_PLUGIN_IDS"]
