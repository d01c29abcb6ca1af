"""
UI Module - Chat surfaces for Rule Agent
========================================

- Shared chat session state and transports
- FastAPI web endpoint and chat page
- Textual terminal chat
"""
