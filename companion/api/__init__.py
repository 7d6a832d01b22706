"""HTTP API for the Accessibility Companion"""
