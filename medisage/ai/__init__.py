"""
AI Module - request routing and model abstraction for MediSage.

Architecture Overview:
=====================

┌──────────────────────────────────────────────────────────────────┐
│                 Query Orchestrator (services/)                   │
│     validate -> route -> one provider call -> normalize -> record│
└───────────────────────────────┬──────────────────────────────────┘
                                │ select_model(tier, capability)
                                ▼
┌──────────────────────────────────────────────────────────────────┐
│                         Tier Router                              │
│           personal / corporate are disjoint catalogs             │
└───────────────────────────────┬──────────────────────────────────┘
                                │ Model Registry lookup
        ┌───────────────┬───────┴───────┬───────────────┐
        ▼               ▼               ▼               ▼
┌───────────────┐ ┌───────────┐ ┌───────────────┐ ┌───────────────┐
│   Together    │ │  Gemini   │ │    OpenAI     │ │   Anthropic   │
│ Mixtral/Llama │ │   Pro     │ │  GPT-4 Turbo  │ │ Claude 3 Opus │
│  (personal)   │ │(corporate)│ │  (corporate)  │ │  (corporate)  │
└───────────────┘ └───────────┘ └───────────────┘ └───────────────┘

Module Structure:
================
- providers/: one adapter per upstream vendor
- registry.py: static catalog of routable models
- router/: tier-based model selection
- prompts/: MediSage system prompts and prompt builders
- schemas/: provider-independent request/result types
- monitoring/: structured logging
- errors.py: the error taxonomy
"""

# Version of the AI module
__version__ = "0.1.0"
