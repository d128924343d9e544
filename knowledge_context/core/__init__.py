"""Core pipeline logic: chunking, embedding, backlog, retrieval and context assembly."""
