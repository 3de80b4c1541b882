"""
Transport security and trust signals visible in the page.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr

PASSWORD_AUTOCOMPLETE = {"current-password", "new-password"}


def _has_csp(document: Document) -> bool:
    if document.meta("content-security-policy") is not None:
        return True
    return any(key.lower() == "content-security-policy" for key in document.headers)


class SecurityRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        if not document.is_https:
            findings.append(
                self.finding(
                    document,
                    id="TECH-007",
                    title="Page not served over HTTPS",
                    severity=Severity.CRITICAL,
                    description=(
                        "The page is served over HTTP instead of HTTPS. Many AI crawlers prefer or require HTTPS "
                        "for security."
                    ),
                    remediation=(
                        "Implement HTTPS with a valid SSL/TLS certificate. HTTPS is essential for modern web security."
                    ),
                    impact=35,
                    evidence=[f"Protocol: {document.parsed_url.scheme.upper() or 'none'}"],
                    tags=["security", "https", "ssl"],
                )
            )
        else:
            insecure = sum(
                1
                for tag in soup.find_all(["script", "link", "img", "iframe"])
                if (attr(tag, "src") or attr(tag, "href")).startswith("http:")
            )
            if insecure:
                findings.append(
                    self.finding(
                        document,
                        id="TECH-008",
                        title="Mixed content detected",
                        severity=Severity.HIGH,
                        description=(
                            f"HTTPS page loading {insecure} HTTP resource(s). Mixed content is blocked by browsers "
                            "and raises security concerns."
                        ),
                        remediation="Update all resource URLs to use HTTPS or protocol-relative URLs (//).",
                        impact=25,
                        evidence=[f"HTTP resources on HTTPS page: {insecure}"],
                        tags=["security", "mixed-content", "https"],
                    )
                )

        if not _has_csp(document):
            findings.append(
                self.finding(
                    document,
                    id="TECH-009",
                    title="No Content Security Policy",
                    severity=Severity.LOW,
                    description=(
                        "No CSP meta tag detected. Content Security Policy helps prevent XSS attacks and signals "
                        "security awareness to crawlers."
                    ),
                    remediation="Implement Content-Security-Policy header or meta tag to enhance security.",
                    impact=10,
                    confidence=0.6,
                    evidence=["No CSP detected in meta tags or response headers"],
                    tags=["security", "csp", "headers"],
                )
            )

        insecure_forms = sum(1 for form in soup.find_all("form") if attr(form, "action").startswith("http://"))
        if insecure_forms:
            findings.append(
                self.finding(
                    document,
                    id="TECH-010",
                    title="Forms submitting to HTTP",
                    severity=Severity.CRITICAL,
                    description=(
                        f"Found {insecure_forms} form(s) submitting to HTTP URLs. This exposes user data and signals "
                        "poor security practices."
                    ),
                    remediation="Update form actions to use HTTPS URLs to protect user data in transit.",
                    impact=30,
                    selector='form[action^="http:"]',
                    evidence=[f"Insecure forms: {insecure_forms}"],
                    tags=["security", "forms", "https"],
                )
            )

        weak_passwords = sum(
            1
            for field in soup.find_all("input", attrs={"type": "password"})
            if attr(field, "autocomplete") not in PASSWORD_AUTOCOMPLETE
        )
        if weak_passwords:
            findings.append(
                self.finding(
                    document,
                    id="TECH-011",
                    title="Password inputs lacking proper autocomplete",
                    severity=Severity.LOW,
                    description=(
                        f"Found {weak_passwords} password input(s) without proper autocomplete attributes. This "
                        "affects password manager integration."
                    ),
                    remediation='Add autocomplete="current-password" or autocomplete="new-password" to password inputs.',
                    impact=5,
                    selector='input[type="password"]',
                    evidence=[f"Password inputs without autocomplete: {weak_passwords}"],
                    tags=["security", "forms", "autocomplete"],
                )
            )

        unverified = sum(
            1
            for script in soup.find_all("script", src=True)
            if attr(script, "src").startswith("http") and not script.has_attr("integrity")
        )
        if unverified:
            findings.append(
                self.finding(
                    document,
                    id="TECH-012",
                    title="External scripts without integrity checks",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {unverified} external script(s) without Subresource Integrity (SRI) checks. This "
                        "poses security risks."
                    ),
                    remediation="Add integrity and crossorigin attributes to external script tags for SRI verification.",
                    impact=15,
                    confidence=0.9,
                    evidence=[f"Scripts without SRI: {unverified}"],
                    tags=["security", "sri", "scripts"],
                )
            )

        return findings


register(
    RuleMeta(
        id="TECH-007",
        title="Security and trust signals",
        category=Category.TECHNICAL,
        severity=Severity.MEDIUM,
        priority=10,
        tags=("security", "https", "trust"),
        description="Checks HTTPS, mixed content, CSP and form security.",
    ),
    SecurityRule,
)
