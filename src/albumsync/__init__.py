"""albumsync - Synchronize shared media albums by content checksum."""

__version__ = "0.1.0"
