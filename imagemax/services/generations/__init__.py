from imagemax.services.generations.store import GenerationStore, Page, make_chat_title

__all__ = ["GenerationStore", "Page", "make_chat_title"]
