"""Services: source loading, chunking, LLM collaborators, prompts."""
