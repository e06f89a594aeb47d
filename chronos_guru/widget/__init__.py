"""Gradio widget for Chronos Guru.

A single-page Gradio app: a landing page with the learner's journey, a
chat page for conversations and debates with historical figures, and a
quiz panel. Speech is played by the browser from cues the server queues.
"""
