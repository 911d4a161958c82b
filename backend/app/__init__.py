"""Enrollment service: paywall checkout, Stripe webhooks and transactional email."""
