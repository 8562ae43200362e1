"""Default policy with the exemptions a typical web frontend needs."""

from __future__ import annotations

from csp_policy.policy.builder import SELF, PolicyBuilder
from csp_policy.policy.domains import DomainList

# Shared templates; every policy instance gets its own copy
DEFAULT_SOURCES: dict[str, DomainList] = {
    "script": DomainList([SELF]),
    "style": DomainList([SELF]),
    "image": DomainList([SELF, "data:", "blob:"]),
    "font": DomainList([SELF, "data:"]),
    "connect": DomainList([SELF]),
    "media": DomainList([SELF]),
    "frame": DomainList([]),
    "child_src": DomainList([]),
    "frame_ancestors": DomainList([SELF]),
    "worker_src": DomainList([]),
    "form_action": DomainList([SELF]),
    "report_to": DomainList([]),
}


class ContentSecurityPolicy(PolicyBuilder):
    """Builder pre-populated with sane exemptions.

    Scripts, styles, XHR, media and form targets are limited to the own
    origin; images and fonts may additionally come from ``data:`` (and
    ``blob:`` for images); inline styles are allowed; eval is not. Framing is
    restricted to the own origin.

    Use :class:`~csp_policy.policy.builder.PolicyBuilder` instead for a
    policy that forbids everything by default.
    """

    def __init__(self) -> None:
        super().__init__()
        self.inline_style_allowed = True
        self.eval_script_allowed = False
        self.eval_wasm_allowed = False

        for field_name, domains in DEFAULT_SOURCES.items():
            setattr(self, field_name, domains.copy())
