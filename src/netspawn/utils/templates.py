"""Template rendering utilities."""

import logging
from typing import Any
from jinja2 import Environment, BaseLoader, StrictUndefined, TemplateError


logger = logging.getLogger(__name__)


TUN_MARKER = "# NetBird TUN device configuration"

# Raw LXC directives exposing /dev/net/tun to an unprivileged container.
TUN_OVERRIDE_TEMPLATE = """
{{ marker }} ({{ hostname }})
lxc.cgroup2.devices.allow: c {{ major }}:{{ minor }} rwm
lxc.mount.entry: /dev/net dev/net none bind,create=dir
lxc.mount.entry: /dev/net/tun dev/net/tun none bind,create=file
"""


class StringTemplateLoader(BaseLoader):
    """Template loader for string templates."""

    def __init__(self, template_string: str):
        self.template_string = template_string

    def get_source(self, environment, template):
        return self.template_string, None, lambda: True


def render_template(template_str: str, **context: Any) -> str:
    """Render a Jinja2 template string with given context."""
    try:
        env = Environment(
            loader=StringTemplateLoader(template_str),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        template = env.get_template("")
        return template.render(**context)

    except TemplateError as e:
        logger.error(f"Template rendering error: {e}")
        raise


def render_tun_overrides(hostname: str, major: int = 10, minor: int = 200) -> str:
    """Render the TUN passthrough block appended to a container config."""
    return render_template(
        TUN_OVERRIDE_TEMPLATE,
        marker=TUN_MARKER,
        hostname=hostname,
        major=major,
        minor=minor,
    )
