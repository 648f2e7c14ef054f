"""
WebVTT conversion example.

Searches for a movie's subtitles, converts the first result to WebVTT and
saves it. Also shows converting a local SRT file.
"""

import sys

from wyziesubs import search_subtitles, normalize_vtt_file

def main():
    # Search and convert the first result
    print("Searching and converting first subtitle...")
    result = search_subtitles(imdb_id="tt0111161", language="en", parse_vtt=True)

    print(f"Using: {result.subtitles[0].display} ({result.subtitles[0].media})")
    with open("/tmp/subtitles.vtt", "w", encoding="utf-8") as f:
        f.write(result.vtt_content)
    print("Saved to: /tmp/subtitles.vtt")

    # Convert a local file given on the command line
    if len(sys.argv) > 1:
        stats = normalize_vtt_file(sys.argv[1])
        print(f"Converted {stats['cues_written']} cues, skipped {stats['blocks_skipped']} blocks")

if __name__ == "__main__":
    main()
