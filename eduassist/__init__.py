"""EduAssist - subject-scoped AI study assistants for educators and students.

Layers:
- core: settings, logging, exceptions
- domain: pydantic models for assistants, chat turns, reviews and profiles
- services: prompt composition, reply postprocessing, scheduling, gamification
- infrastructure: LLM client, relational store, Redis cache
- api: FastAPI routes
"""
