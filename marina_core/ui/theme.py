import streamlit as st

# === COLOR PALETTE ===
PRIMARY_COLOR    = "#0e7490"
SECONDARY_COLOR  = "#1e3a8a"
SUCCESS_COLOR    = "#10b981"
WARNING_COLOR    = "#f59e0b"
DANGER_COLOR     = "#ef4444"
INFO_COLOR       = "#3b82f6"
TEXT_COLOR       = "#1f2937"
SUBTLE_TEXT      = "#4b5563"
GRID_COLOR       = "#e5e7eb"
BACKGROUND_COLOR = "#f8fafc"
CARD_BG_LIGHT    = "#ffffff"

LEVEL_COLORS = {
    "success": SUCCESS_COLOR,
    "info": INFO_COLOR,
    "warning": WARNING_COLOR,
    "error": DANGER_COLOR,
}


def apply_css():
    """Shared page styling."""
    st.markdown(f"""
        <style>
        .main {{
            background-color: {BACKGROUND_COLOR};
            color: {TEXT_COLOR};
            font-family: 'Segoe UI','Inter','SF Pro Display',sans-serif;
        }}
        .main-header {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            padding: 1.6rem 2rem; border-radius: 16px; margin-bottom: 1.5rem;
            box-shadow: 0 8px 32px rgba(14,116,144,.25);
        }}
        .status-pill {{
            display: inline-block; padding: .2rem .75rem; border-radius: 999px;
            font-size: .85rem; font-weight: 600; color: white;
        }}
        .stTabs [aria-selected="true"] {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            color: white; font-weight: 600;
        }}
        </style>
    """, unsafe_allow_html=True)


def header(title: str, subtitle: str, icon: str = "⚓"):
    st.markdown(f"""
        <div class="main-header">
            <div style="display:flex;gap:1.2rem;align-items:center;">
                <div style="font-size:2.6rem;">{icon}</div>
                <div>
                    <h1 style="margin:0; font-size:2.1rem; color:white;">{title}</h1>
                    <p style="margin:.35rem 0 0 0;color:rgba(255,255,255,.85);font-size:1.0rem">{subtitle}</p>
                </div>
            </div>
        </div>
    """, unsafe_allow_html=True)


def status_pill(label: str, level: str = "info") -> str:
    """HTML for a small coloured pill."""
    color = LEVEL_COLORS.get(level, INFO_COLOR)
    return f'<span class="status-pill" style="background:{color}">{label}</span>'
