"""
mr-tagger: one metadata model for ID3, MP4 and Vorbis comment tags.

This package reads, edits and writes the tags embedded in audio files
through a single field model, whatever tagging scheme the file uses:

    ID3v2 (MP3, AIFF)       MP4 "ilst" atoms (M4A, MP4, ...)
    Vorbis comments (FLAC, Ogg Vorbis, Opus, Speex)

Architecture:
    tags/       - Backend adapters: read and write each tag format (mutagen)
    metadata/   - Format-independent layer over the backend tags
        facade.py   - Canonical field accessors and setters
        frames.py   - Raw (identifier, value) text frame projection
        artwork.py  - Embedded picture read, remove, replace and append
    commands.py - The six core operations over a Metadata value
    store.py    - Thread-safe list of open files for an editor front end
    core/       - Configuration, logging, exceptions

Usage:
    Single file:
        from mr_tagger.commands import open_metadata, get_field_view, save_metadata

        metadata = open_metadata(Path("song.flac"))
        print(get_field_view(metadata).artists)
        metadata.set_artists(["Alice", "Bob"])
        save_metadata(metadata, Path("song.flac"))

    Editor state:
        from mr_tagger.core import load_config, configure_from_config
        from mr_tagger.store import FileStore

        config = load_config()
        configure_from_config(config)
        store = FileStore(config)
        store.open_files([Path("a.mp3"), Path("b.m4a")])
        store.set_field("genres", ["Jazz"])
        store.save_file(store.current_index)

Configuration:
    Optional mr_tagger.yaml in the current directory:

        logging:
          level: "INFO"
          directory: null
          colored: true
        tags:
          mp4_missing_tag: "empty"    # or "error"
"""

__version__ = "0.1.0"
__author__ = "mr-tagger Team"
