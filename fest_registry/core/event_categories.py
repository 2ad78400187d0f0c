"""
Event categories of the fest. Each category has its own assignment table keyed by
college; slugs are what clients send, table names are what the database holds.
"""

from typing import Dict

EVENT_CATEGORIES: Dict[str, str] = {
    # Theatre
    "mime": "event_mime",
    "mimicry": "event_mimicry",
    "one_act_play": "event_one_act_play",
    "skits": "event_skits",
    # Literary
    "debate": "event_debate",
    "elocution": "event_elocution",
    "quiz": "event_quiz",
    # Fine arts
    "cartooning": "event_cartooning",
    "clay_modelling": "event_clay_modelling",
    "collage_making": "event_collage_making",
    "installation": "event_installation",
    "on_spot_painting": "event_on_spot_painting",
    "poster_making": "event_poster_making",
    "rangoli": "event_rangoli",
    "spot_photography": "event_spot_photography",
    # Music
    "classical_vocal_solo": "event_classical_vocal_solo",
    "classical_instrumental_percussion": "event_classical_instr_percussion",
    "classical_instrumental_non_percussion": "event_classical_instr_non_percussion",
    "light_vocal_solo": "event_light_vocal_solo",
    "western_vocal_solo": "event_western_vocal_solo",
    "group_song_indian": "event_group_song_indian",
    "group_song_western": "event_group_song_western",
    "folk_orchestra": "event_folk_orchestra",
    # Dance
    "folk_tribal_dance": "event_folk_dance",
    "classical_dance_solo": "event_classical_dance_solo",
}
