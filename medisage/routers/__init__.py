"""
Routers module - API endpoint handlers organized by feature.

- auth: registration, login, session status
- users: saved items, medical history, subscription tier
- medical: medical Q&A, symptom checker, medicine scanner, voice assistant
"""
