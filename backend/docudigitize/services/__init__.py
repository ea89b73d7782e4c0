"""
Services layer - business logic over the entity store and the AI providers.
"""
