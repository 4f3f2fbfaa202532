"""
Claude Tokenizer package.

Provides:
- A FastAPI gateway that counts tokens for text, PDFs and images via Anthropic,
  with GPT-4o (tiktoken) and Gemini estimates for plain text
- A client controller and CLI that drive the gateway
"""
