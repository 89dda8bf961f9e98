"""Formal stage invariants.

Documents what each correction stage requires and guarantees, and the
canonical order the stages must run in. Later stages consume the output
of earlier ones.
"""

STAGE_ORDER = (
    "fill_missing_metadata",
    "screen_bad_heading",
    "force_3beam_profile",
    "force_3beam_bottom_track",
    "retransform",
    "mark_bad_below_bottom",
    "remove_ship_speed",
)

PIPELINE_INVARIANTS = {
    "fill_missing_metadata": [
        "Runs only with bottom track present and zero profile beams or bins",
        "Afterwards ancillary data exists and the header beam count equals bottom track",
    ],
    "screen_bad_heading": [
        "Heading 0.0 or NaN is replaced by the previous good heading when one exists",
        "A good heading becomes the new previous heading",
    ],
    "force_3beam_profile": [
        "Only for 4-beam profiles",
        "Forced beam is BAD in every bin; error velocity is 0 where solved",
    ],
    "force_3beam_bottom_track": [
        "Only for 4-beam bottom track",
        "Forced beam is BAD; error velocity is 0 when solved",
    ],
    "retransform": [
        "Beams below the correlation (and SNR for bottom track) thresholds are excluded",
        "Earth velocity uses the selected heading source plus offset",
    ],
    "mark_bad_below_bottom": [
        "Boundary is the current bottom range, else the previous good range",
        "Every bin deeper than the boundary is BAD in all frames",
    ],
    "remove_ship_speed": [
        "Only good water cells and good reference components are corrected",
        "Velocity vectors are recomputed from the corrected earth velocity",
    ],
    "advance_state": [
        "Runs after every frame, even when an earlier stage failed",
        "Each previous component is overwritten only by a good current component",
    ],
}

# Which stages are selected by options vs always run
STAGE_REQUIREMENTS = {
    "fill_missing_metadata": "REQUIRED",
    "screen_bad_heading": "REQUIRED",
    "force_3beam_profile": "OPTIONAL",
    "force_3beam_bottom_track": "OPTIONAL",
    "retransform": "OPTIONAL",
    "mark_bad_below_bottom": "OPTIONAL",
    "remove_ship_speed": "OPTIONAL",
    "advance_state": "REQUIRED",
}
