"""Content-Security-Policy header value composition.

Acceptance Criteria:
  AC1: An untouched policy forbids everything and still forbids framing.
  AC2: Sources can be allowed and disallowed per directive; disallowing
       restores the previous output.
  AC3: A script nonce replaces 'self' in script-src, permanently.
  AC4: strict-dynamic applies to script-src, or only to script-src-elem.
  AC5: Directives are always rendered in the same order.
  AC6: Presets seed a policy; the header name follows report-only mode.
"""

from __future__ import annotations

from csp_policy import ContentSecurityPolicy, PolicyBuilder
from csp_policy.policy.presets import builder_from_preset, header_name

BASE = "default-src 'none';base-uri 'none';manifest-src 'self';"


class TestAC1EmptyPolicy:
    def test_forbids_everything(self):
        assert PolicyBuilder().serialize() == BASE + "frame-ancestors 'none'"


class TestAC2AllowDisallow:
    def test_round_trip_per_directive(self):
        pairs = [
            ("add_allowed_script_domain", "disallow_script_domain"),
            ("add_allowed_style_domain", "disallow_style_domain"),
            ("add_allowed_image_domain", "disallow_image_domain"),
            ("add_allowed_font_domain", "disallow_font_domain"),
            ("add_allowed_connect_domain", "disallow_connect_domain"),
            ("add_allowed_media_domain", "disallow_media_domain"),
            ("add_allowed_object_domain", "disallow_object_domain"),
            ("add_allowed_frame_domain", "disallow_frame_domain"),
            ("add_allowed_child_src_domain", "disallow_child_src_domain"),
            ("add_allowed_frame_ancestor_domain", "disallow_frame_ancestor_domain"),
            ("add_allowed_worker_src_domain", "disallow_worker_src_domain"),
            ("add_allowed_form_action_domain", "disallow_form_action_domain"),
        ]
        expected = ContentSecurityPolicy().serialize()
        for add, disallow in pairs:
            policy = ContentSecurityPolicy()
            getattr(policy, add)("https://extra.example.com")
            assert "https://extra.example.com" in policy.serialize()
            getattr(policy, disallow)("https://extra.example.com")
            assert policy.serialize() == expected, add


class TestAC3Nonce:
    def test_nonce_replaces_self(self):
        policy = PolicyBuilder()
        policy.add_allowed_script_domain("'self'").add_allowed_script_domain("https://x.com")
        policy.use_js_nonce("n1")
        assert policy.serialize() == BASE + "script-src 'nonce-n1' https://x.com;frame-ancestors 'none'"
        assert list(policy.script) == ["https://x.com"]


class TestAC4StrictDynamic:
    def test_on_script_src(self):
        policy = PolicyBuilder().use_js_nonce("n1").use_strict_dynamic(True)
        assert "script-src 'strict-dynamic' 'nonce-n1';" in policy.serialize()

    def test_on_script_elements_only(self):
        policy = PolicyBuilder().use_js_nonce("n1").use_strict_dynamic_on_scripts(True).use_strict_dynamic(False)
        assert "script-src 'nonce-n1';script-src-elem 'strict-dynamic' 'nonce-n1';" in policy.serialize()


class TestAC5Order:
    def test_same_output_regardless_of_call_order(self):
        first = PolicyBuilder()
        first.add_allowed_image_domain("data:").add_report_to("https://r").allow_inline_style()
        first.add_allowed_worker_src_domain("blob:").add_allowed_frame_ancestor_domain("'self'")

        second = PolicyBuilder()
        second.add_allowed_frame_ancestor_domain("'self'").add_allowed_worker_src_domain("blob:")
        second.allow_inline_style().add_report_to("https://r").add_allowed_image_domain("data:")

        assert first.serialize() == second.serialize() == (
            BASE
            + "style-src  'unsafe-inline';img-src data:;worker-src blob:;"
            + "frame-ancestors 'self';report-uri https://r"
        )


class TestAC6Presets:
    def test_preset_with_report_only_header(self, monkeypatch):
        monkeypatch.setenv("CSP_REPORT_ONLY", "true")
        monkeypatch.setenv("CSP_REPORT_URIS", '["https://r.example/csp"]')
        name = header_name()
        value = builder_from_preset("strict", nonce="abc").serialize()
        assert name == "Content-Security-Policy-Report-Only"
        assert value == (
            BASE + "script-src 'nonce-abc';frame-ancestors 'none';report-uri https://r.example/csp"
        )
