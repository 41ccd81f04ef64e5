class LyricsError(ValueError):
    pass


class UnknownFormatError(LyricsError):
    pass
