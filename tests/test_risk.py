"""
Tests for core.risk — risk tier classification and scope parsing.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import unittest
from core.risk import (
    RiskClassifier,
    RiskTier,
    UpdateScope,
    classify,
    classify_batch,
    parse_scope,
)


class TestClassify(unittest.TestCase):
    """Tests for classify()."""

    def test_critical_patterns(self):
        for name in ("openssl", "libssl-openssl3", "openssh-server", "security-updates"):
            self.assertEqual(classify(name), RiskTier.CRITICAL, name)

    def test_high_patterns(self):
        for name in ("systemd", "libsystemd0", "linux-image-6.5.0", "linux-libc-dev", "kernel-headers"):
            self.assertEqual(classify(name), RiskTier.HIGH, name)

    def test_everything_else_is_safe(self):
        for name in ("firefox", "vim", "python3-requests", "linux-firmware"):
            self.assertEqual(classify(name), RiskTier.SAFE, name)

    def test_case_insensitive(self):
        self.assertEqual(classify("OpenSSL-Dev"), RiskTier.CRITICAL)
        self.assertEqual(classify("SystemD-Lib"), RiskTier.HIGH)

    def test_critical_wins_over_high(self):
        # Matches both a critical and a high pattern
        self.assertEqual(classify("systemd-security-hardening"), RiskTier.CRITICAL)
        self.assertEqual(classify("linux-image-openssl"), RiskTier.CRITICAL)

    def test_empty_name_is_safe(self):
        self.assertEqual(classify(""), RiskTier.SAFE)


class TestClassifyBatch(unittest.TestCase):
    """Tests for classify_batch()."""

    NAMES = ["openssl-dev", "firefox", "systemd-lib", "openssh-client", "vim"]

    def test_matches_single_calls(self):
        batch = classify_batch(self.NAMES)
        for name in self.NAMES:
            self.assertEqual(batch[name], classify(name))

    def test_order_independent(self):
        self.assertEqual(classify_batch(self.NAMES), classify_batch(reversed(self.NAMES)))

    def test_empty(self):
        self.assertEqual(classify_batch([]), {})


class TestRiskClassifier(unittest.TestCase):
    """Tests for RiskClassifier with custom rules and counts."""

    def test_tier_counts_includes_every_tier(self):
        counts = RiskClassifier().tier_counts(["firefox"])
        self.assertEqual(counts, {RiskTier.CRITICAL: 0, RiskTier.HIGH: 0, RiskTier.SAFE: 1})

    def test_tier_counts_sum_to_total(self):
        names = ["openssl-dev", "firefox", "systemd-lib", "vim"]
        counts = RiskClassifier().tier_counts(names)
        self.assertEqual(sum(counts.values()), len(names))
        self.assertEqual(counts[RiskTier.CRITICAL], 1)
        self.assertEqual(counts[RiskTier.HIGH], 1)
        self.assertEqual(counts[RiskTier.SAFE], 2)

    def test_rule_order_decides(self):
        classifier = RiskClassifier([
            (RiskTier.HIGH, ("lib",)),
            (RiskTier.CRITICAL, ("ssl",)),
        ])
        self.assertEqual(classifier.classify("libssl"), RiskTier.HIGH)


class TestParseScope(unittest.TestCase):
    """Tests for parse_scope() keyword aliases."""

    def test_aliases(self):
        self.assertEqual(parse_scope("safe"), UpdateScope.SAFE)
        self.assertEqual(parse_scope("low"), UpdateScope.SAFE)
        self.assertEqual(parse_scope("high"), UpdateScope.HIGH)
        self.assertEqual(parse_scope("system"), UpdateScope.HIGH)
        self.assertEqual(parse_scope("critical"), UpdateScope.CRITICAL)
        self.assertEqual(parse_scope("security"), UpdateScope.CRITICAL)
        self.assertEqual(parse_scope(" ALL "), UpdateScope.ALL)

    def test_unknown(self):
        with self.assertRaises(ValueError):
            parse_scope("everything")

    def test_scope_tier(self):
        self.assertEqual(UpdateScope.SAFE.tier, RiskTier.SAFE)
        self.assertEqual(UpdateScope.CRITICAL.tier, RiskTier.CRITICAL)
        self.assertIsNone(UpdateScope.ALL.tier)


if __name__ == "__main__":
    unittest.main()
