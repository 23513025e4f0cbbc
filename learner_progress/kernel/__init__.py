"""
Stable Kernel Layer

Foundational pieces shared by every engine:
- Error taxonomy
- Level table (xp -> level)
- Event bus and event types
- Local key-value store ORM model
"""
