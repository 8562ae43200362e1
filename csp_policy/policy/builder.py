"""Content-Security-Policy builder.

The builder accumulates allowed sources per directive plus a few modifiers
(nonce, strict-dynamic, eval, inline style) and renders them into a single
header value with a fixed directive order.
"""

from __future__ import annotations

import structlog

from csp_policy.policy.domains import DomainList

logger = structlog.get_logger()

SELF = "'self'"

# Always-present prefix of every rendered policy
_BASE_DIRECTIVES = "default-src 'none';base-uri 'none';manifest-src 'self';"

# Directives rendered only when their list is non-empty, in output order
_PLAIN_DIRECTIVES: tuple[tuple[str, str], ...] = (
    ("img-src", "image"),
    ("font-src", "font"),
    ("connect-src", "connect"),
    ("media-src", "media"),
    ("object-src", "object"),
    ("frame-src", "frame"),
    ("child-src", "child_src"),
    ("worker-src", "worker_src"),
    ("form-action", "form_action"),
)

DOMAIN_FIELDS: tuple[str, ...] = (
    "script",
    "style",
    "image",
    "font",
    "connect",
    "media",
    "object",
    "frame",
    "child_src",
    "frame_ancestors",
    "worker_src",
    "form_action",
    "report_to",
)


class PolicyBuilder:
    """Mutable CSP builder. Everything is forbidden until explicitly allowed.

    Mutators return ``self`` so calls can be chained::

        policy = PolicyBuilder().add_allowed_image_domain("data:").use_js_nonce(nonce)
        header_value = policy.serialize()

    Domain tokens are emitted verbatim; callers must pass sanitized values.
    """

    def __init__(self) -> None:
        self.js_nonce: str | None = None
        self.strict_dynamic: bool | None = None
        self.strict_dynamic_on_scripts: bool | None = None
        self.eval_script_allowed: bool | None = None
        self.eval_wasm_allowed: bool | None = None
        self.inline_style_allowed: bool | None = None

        self.script = DomainList()
        self.style = DomainList()
        self.image = DomainList()
        self.font = DomainList()
        self.connect = DomainList()
        self.media = DomainList()
        self.object = DomainList()
        self.frame = DomainList()
        self.child_src = DomainList()  # deprecated in favour of worker-src / frame-src
        self.frame_ancestors = DomainList()
        self.worker_src = DomainList()
        self.form_action = DomainList()
        self.report_to = DomainList()

    # ── Modifiers ────────────────────────────────────────────────────────

    def use_js_nonce(self, nonce: str) -> PolicyBuilder:
        """Base64 nonce rendered as ``'nonce-<value>'`` in script-src."""
        self.js_nonce = nonce
        return self

    def use_strict_dynamic(self, state: bool = False) -> PolicyBuilder:
        self.strict_dynamic = state
        return self

    def use_strict_dynamic_on_scripts(self, state: bool = False) -> PolicyBuilder:
        """Apply strict-dynamic to script-src-elem only.

        Trust then propagates only to imports of scripts loaded via
        ``<script>`` tags, which weakens the policy less than
        :meth:`use_strict_dynamic`.
        """
        self.strict_dynamic_on_scripts = state
        return self

    def allow_eval_script(self, state: bool = True) -> PolicyBuilder:
        self.eval_script_allowed = state
        return self

    def allow_eval_wasm(self, state: bool = True) -> PolicyBuilder:
        """Whether WebAssembly compilation is allowed."""
        self.eval_wasm_allowed = state
        return self

    def allow_inline_style(self, state: bool = True) -> PolicyBuilder:
        self.inline_style_allowed = state
        return self

    def add_report_to(self, location: str) -> PolicyBuilder:
        """Add a location CSP violations are reported to."""
        self.report_to.append(location)
        return self

    # ── Allowed sources ──────────────────────────────────────────────────

    def add_allowed_script_domain(self, domain: str) -> PolicyBuilder:
        """Allow JavaScript from ``domain``. Use ``*`` for all domains."""
        self.script.append(domain)
        return self

    def disallow_script_domain(self, domain: str) -> PolicyBuilder:
        self.script.discard(domain)
        return self

    def add_allowed_style_domain(self, domain: str) -> PolicyBuilder:
        """Allow CSS from ``domain``. Use ``*`` for all domains."""
        self.style.append(domain)
        return self

    def disallow_style_domain(self, domain: str) -> PolicyBuilder:
        self.style.discard(domain)
        return self

    def add_allowed_image_domain(self, domain: str) -> PolicyBuilder:
        self.image.append(domain)
        return self

    def disallow_image_domain(self, domain: str) -> PolicyBuilder:
        self.image.discard(domain)
        return self

    def add_allowed_font_domain(self, domain: str) -> PolicyBuilder:
        self.font.append(domain)
        return self

    def disallow_font_domain(self, domain: str) -> PolicyBuilder:
        self.font.discard(domain)
        return self

    def add_allowed_connect_domain(self, domain: str) -> PolicyBuilder:
        """Allow scripts to open connections (XHR, fetch, WebSocket) to ``domain``."""
        self.connect.append(domain)
        return self

    def disallow_connect_domain(self, domain: str) -> PolicyBuilder:
        self.connect.discard(domain)
        return self

    def add_allowed_media_domain(self, domain: str) -> PolicyBuilder:
        self.media.append(domain)
        return self

    def disallow_media_domain(self, domain: str) -> PolicyBuilder:
        self.media.discard(domain)
        return self

    def add_allowed_object_domain(self, domain: str) -> PolicyBuilder:
        """Allow ``<object>`` and ``<embed>`` content from ``domain``."""
        self.object.append(domain)
        return self

    def disallow_object_domain(self, domain: str) -> PolicyBuilder:
        self.object.discard(domain)
        return self

    def add_allowed_frame_domain(self, domain: str) -> PolicyBuilder:
        """Allow ``domain`` to be loaded in an iframe."""
        self.frame.append(domain)
        return self

    def disallow_frame_domain(self, domain: str) -> PolicyBuilder:
        self.frame.discard(domain)
        return self

    def add_allowed_child_src_domain(self, domain: str) -> PolicyBuilder:
        """Deprecated: prefer worker-src or frame-src."""
        self.child_src.append(domain)
        return self

    def disallow_child_src_domain(self, domain: str) -> PolicyBuilder:
        self.child_src.discard(domain)
        return self

    def add_allowed_frame_ancestor_domain(self, domain: str) -> PolicyBuilder:
        """Allow ``domain`` to embed this site in a frame."""
        self.frame_ancestors.append(domain)
        return self

    def disallow_frame_ancestor_domain(self, domain: str) -> PolicyBuilder:
        self.frame_ancestors.discard(domain)
        return self

    def add_allowed_worker_src_domain(self, domain: str) -> PolicyBuilder:
        self.worker_src.append(domain)
        return self

    def disallow_worker_src_domain(self, domain: str) -> PolicyBuilder:
        self.worker_src.discard(domain)
        return self

    def add_allowed_form_action_domain(self, domain: str) -> PolicyBuilder:
        """Allow forms to submit to ``domain``."""
        self.form_action.append(domain)
        return self

    def disallow_form_action_domain(self, domain: str) -> PolicyBuilder:
        self.form_action.discard(domain)
        return self

    # ── Rendering ────────────────────────────────────────────────────────

    def _normalize_script_domains(self) -> None:
        """Drop ``'self'`` from script sources once a nonce is in use.

        This mutates the builder: the token stays removed for every later
        serialization, even if the nonce is cleared afterwards.
        """
        if self.js_nonce is None or SELF not in self.script:
            return
        self.script.discard(SELF)
        logger.debug("script_self_stripped")

    def _script_src(self) -> str:
        script_src = ""
        if self.js_nonce is not None:
            if self.strict_dynamic:
                script_src += "'strict-dynamic' "
            script_src += f"'nonce-{self.js_nonce}'"
            self._normalize_script_domains()
            if self.script:
                script_src += " "
        script_src += self.script.join()
        if self.eval_script_allowed:
            script_src += " 'unsafe-eval'"
        if self.eval_wasm_allowed:
            script_src += " 'wasm-unsafe-eval'"
        return script_src

    def serialize(self) -> str:
        """Render the policy as a Content-Security-Policy header value.

        Directive order is fixed: default-src, base-uri, manifest-src,
        script-src, script-src-elem, style-src, img-src, font-src,
        connect-src, media-src, object-src, frame-src, child-src, worker-src,
        form-action, frame-ancestors, report-uri.

        When a nonce is set, ``'self'`` is permanently removed from the script
        sources (see :meth:`_normalize_script_domains`).
        """
        policy = _BASE_DIRECTIVES
        clauses = 3

        script_src = ""
        if self.script or self.eval_script_allowed or self.eval_wasm_allowed or self.js_nonce is not None:
            script_src = self._script_src()
            policy += f"script-src {script_src};"
            clauses += 1

        # Only needed when script-src does not already carry strict-dynamic
        if self.strict_dynamic_on_scripts and self.js_nonce is not None and not self.strict_dynamic:
            policy += f"script-src-elem 'strict-dynamic' {script_src};"
            clauses += 1

        if self.style or self.inline_style_allowed:
            style_src = self.style.join()
            if self.inline_style_allowed:
                style_src += " 'unsafe-inline'"
            policy += f"style-src {style_src};"
            clauses += 1

        for directive, field_name in _PLAIN_DIRECTIVES:
            domains: DomainList = getattr(self, field_name)
            if domains:
                policy += f"{directive} {domains.join()};"
                clauses += 1

        if self.frame_ancestors:
            policy += f"frame-ancestors {self.frame_ancestors.join()};"
        else:
            policy += "frame-ancestors 'none';"
        clauses += 1

        if self.report_to:
            policy += f"report-uri {self.report_to.join()};"
            clauses += 1

        logger.debug("policy_serialized", directives=clauses)
        # frame-ancestors is always emitted, so exactly one trailing ";" remains
        return policy[:-1]


# Everything forbidden unless explicitly allowed
EmptyContentSecurityPolicy = PolicyBuilder
