"""LLM integration - Gemini model manager, prompts and the analysis client"""
