"""Environments tools: the create tool, its collection and the API client wrapper."""