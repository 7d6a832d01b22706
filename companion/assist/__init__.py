"""
Accessibility assist pipeline - modes, prompt composition, rendering and the
session state machine.
"""
