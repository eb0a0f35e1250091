"""
Brari Backend Application

A document-grounded chat assistant: upload PDF books, get their titles and
authors inferred, and chat about them with a language model.

Features:
- Server-side or client-side PDF text extraction
- Title and author inference with Google Gemini
- Redis document store with collision-free keys
- Streamed chat answers grounded in stored documents
- Token usage and cost logging
"""

__version__ = "1.0.0"
__author__ = "Brari Team"
__description__ = "A document-grounded chat assistant for your books"
