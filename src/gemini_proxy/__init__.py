"""
Gemini proxy package.

Provides:
- A framework-independent request handler that validates client payloads
  and forwards them to the Gemini API with a server-held key
- A FastAPI app exposing the handler with permissive CORS headers
"""
