"""Applications tools: list, get, create and update, with their API client wrapper."""