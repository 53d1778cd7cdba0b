"""
A2UI Restaurant Agent

A2A agent server that answers restaurant questions with A2UI rich UI
when the client negotiates the A2UI extension, and plain text otherwise.

Components:
- extension: A2UI extension negotiation and data parts
- ui_events: UI event decoding and query building
- splitter: Splits final answers into text and A2UI data parts
- executor: Per-turn state machine publishing A2A events
- request_handler: JSON-RPC methods over the task store
- agent: OpenAI-compatible LLM client with tool calling
- main: FastAPI app and entry point
"""

__version__ = "1.0.0"
