def get_mastodon_language(lang: str) -> str:
    """Return `lang` with a region subtag, guessing the region from the code itself.

    `fr` becomes `fr_FR`; codes that already carry a region (`pt_BR`) are kept.
    """
    if '_' not in lang:
        return f'{lang}_{lang.upper()}'
    return lang
