"""Generative model collaborators: sentence generation, transcription, coaching tips."""
