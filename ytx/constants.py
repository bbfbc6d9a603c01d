"""
constants.py - Central location for constants used in ytx

Version information, external tool names, exit statuses and the help examples
shared by the CLI.
"""

from . import __version__

# Version Information
VERSION = __version__
APP_NAME = "ytx"
APP_DESCRIPTION = "Download and transcribe audio from YouTube (or any yt-dlp URL)."

# External tools
YT_DLP = "yt-dlp"
FFMPEG = "ffmpeg"
INSTALL_HINTS = {
    YT_DLP: "Install with: pip install yt-dlp (or brew install yt-dlp)",
    FFMPEG: "Install with: brew install ffmpeg (or your package manager)",
}

# yt-dlp format selectors
AUDIO_FORMAT_SELECTOR = "bestaudio[ext=m4a]/bestaudio/best"
VIDEO_FORMAT_SELECTOR = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"
OUTPUT_TEMPLATE = "%(title)s.%(ext)s"

# Exit statuses
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# Writing transcripts to stdout
STDOUT_MARKER = "-"

PREVIEW_LINES = 20

# Sample command examples for help
EXAMPLES = """
Examples:
ytx https://www.youtube.com/watch?v=dQw4w9WgXcQ
ytx --format srt --locale es-ES https://youtu.be/VIDEO_ID
ytx --video --keep-audio https://vimeo.com/video_id
ytx -o - https://youtu.be/VIDEO_ID > transcript.txt
ytx              # guided mode, asks for URL and options
"""
