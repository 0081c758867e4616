"""LLM integration: chat model providers and the answer scoring pipeline."""
