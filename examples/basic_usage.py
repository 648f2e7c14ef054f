"""
Basic wyziesubs usage example.

Searches for English subtitles of a TV episode and prints the results.
"""

import logging

from wyziesubs import SearchCriteria, WyzieClient

def main():
    logging.basicConfig(level=logging.INFO)

    criteria = SearchCriteria(tmdb_id=1399, season=1, episode=1, language="en")

    with WyzieClient() as client:
        print("Searching subtitles...")
        subtitles = client.search(criteria)

    print(f"Found {len(subtitles)} subtitles")
    for subtitle in subtitles[:5]:
        hi = " (HI)" if subtitle.is_hearing_impaired else ""
        print(f"- {subtitle.display} [{subtitle.format}]{hi}: {subtitle.url}")

if __name__ == "__main__":
    main()
