"""
Presentation Pattern Catalog
============================

The 25 presentation patterns from the "how to present" guide, grouped into
the five content categories, plus the compatibility table, per-category
fallbacks and classifier keyword lists.

Japanese phrases come from the source guides; English equivalents sit next
to them so English decks classify the same way.

This module is static data. Load it through deckflow.core.pattern_catalog.
"""

from typing import Dict, List, Tuple

# Template substrings that make a pattern harder to implement, and their weight
COMPLEXITY_HINTS: Tuple[Tuple[str, int], ...] = (
    ("mermaid", 3),
    ("javascript", 4),
    ("grid", 2),
    ("flex", 2),
    ("animation", 3),
    ("svg", 3),
)

# =============================================================================
# PATTERNS
# =============================================================================

PRESENTATION_PATTERNS: List[Dict] = [
    # A. Numerical data (6)
    {
        "id": "number-emphasis",
        "name": "Number Emphasis",
        "category": "numerical-data",
        "description": "Make a single figure such as revenue or attainment stick",
        "use_cases": ["売上実績", "達成率", "KPI表示", "重要な数値", "headline figure", "key metric"],
        "template": '<div style="font-size: 72px; color: #ff6b6b; font-weight: bold; margin: 50px 0;">150億円</div>',
        "effectiveness": 9,
    },
    {
        "id": "comparison",
        "name": "Comparison",
        "category": "numerical-data",
        "description": "A/B, year-over-year or competitor comparison",
        "use_cases": ["A/B比較", "前年比", "競合分析", "Before/After", "year over year", "competitor analysis"],
        "template": "<!-- _class: split-layout -->",
        "effectiveness": 8,
    },
    {
        "id": "chart-graph",
        "name": "Chart / Graph",
        "category": "numerical-data",
        "description": "Show change, ratio or trend of values",
        "use_cases": ["売上推移", "市場シェア", "成長率", "データ分析", "market share", "growth trend"],
        "template": "![w:600](chart.png)",
        "effectiveness": 8,
    },
    {
        "id": "dashboard",
        "name": "Dashboard",
        "category": "numerical-data",
        "description": "Several key indicators at a glance",
        "use_cases": ["KPIダッシュボード", "業績サマリー", "指標一覧", "kpi dashboard", "performance summary"],
        "template": '<div style="display: grid; grid-template-columns: 1fr 1fr 1fr; gap: 20px;">',
        "effectiveness": 7,
    },
    {
        "id": "progress-bar",
        "name": "Progress Bar",
        "category": "numerical-data",
        "description": "Degree of completion or progress",
        "use_cases": ["プロジェクト進捗", "目標達成度", "完了率", "project progress", "completion rate"],
        "template": '<div class="progress-bar"><div class="progress-fill" style="width: 75%;"></div></div>',
        "effectiveness": 6,
    },
    {
        "id": "ranking",
        "name": "Ranking",
        "category": "numerical-data",
        "description": "Order or relative importance",
        "use_cases": ["売上ランキング", "人気商品", "優先順位", "top sellers", "priority order"],
        "template": '<ol class="ranking-list">',
        "effectiveness": 7,
    },

    # B. Structure and relationships (6)
    {
        "id": "diagram-structure",
        "name": "Structure Diagram",
        "category": "structural-relationship",
        "description": "Explain the big picture or how parts relate",
        "use_cases": ["システム構成", "組織図", "関係性説明", "system architecture", "component overview"],
        "template": "<!-- Mermaid図 + 説明 -->",
        "effectiveness": 9,
    },
    {
        "id": "pyramid",
        "name": "Pyramid",
        "category": "structural-relationship",
        "description": "Layers or levels of importance",
        "use_cases": ["優先順位", "階層構造", "マズローの欲求", "layered hierarchy"],
        "template": '<div class="pyramid">',
        "effectiveness": 8,
    },
    {
        "id": "matrix",
        "name": "Two-Axis Matrix",
        "category": "structural-relationship",
        "description": "Sort items by priority or classification",
        "use_cases": ["重要度×緊急度", "ポートフォリオ分析", "4象限分析", "portfolio analysis", "four quadrants"],
        "template": '<div class="matrix-2x2">',
        "effectiveness": 8,
    },
    {
        "id": "network",
        "name": "Network Diagram",
        "category": "structural-relationship",
        "description": "Mutual relationships and influence",
        "use_cases": ["ネットワーク構成", "人間関係", "影響関係", "network topology", "stakeholder map"],
        "template": "<!-- ノード + エッジの図解 -->",
        "effectiveness": 7,
    },
    {
        "id": "org-tree",
        "name": "Org Chart / Tree",
        "category": "structural-relationship",
        "description": "Hierarchies and classification trees",
        "use_cases": ["組織構造", "分類体系", "決定木", "org chart", "decision tree"],
        "template": '<div class="tree-structure">',
        "effectiveness": 7,
    },
    {
        "id": "flow-process",
        "name": "Process Flow",
        "category": "structural-relationship",
        "description": "Business flows and decision paths",
        "use_cases": ["業務フロー", "判断プロセス", "手順説明", "business process", "decision flow"],
        "template": '<div class="process-flow">',
        "effectiveness": 8,
    },

    # C. Temporal flow (4)
    {
        "id": "steps",
        "name": "Steps",
        "category": "temporal-flow",
        "description": "Walk through a procedure or staged plan",
        "use_cases": ["手順説明", "プロセス", "段階的計画", "step by step", "how to"],
        "template": '<div class="step-flow">',
        "effectiveness": 9,
    },
    {
        "id": "timeline",
        "name": "Timeline",
        "category": "temporal-flow",
        "description": "Past, present and future",
        "use_cases": ["プロジェクト履歴", "発展過程", "ロードマップ", "project history", "milestones"],
        "template": '<div class="timeline">',
        "effectiveness": 8,
    },
    {
        "id": "cause-effect",
        "name": "Cause and Effect",
        "category": "temporal-flow",
        "description": "Logic from cause to result",
        "use_cases": ["問題分析", "影響関係", "論理展開", "root cause", "problem analysis"],
        "template": '<div class="cause-effect-flow">',
        "effectiveness": 8,
    },
    {
        "id": "roadmap",
        "name": "Roadmap",
        "category": "temporal-flow",
        "description": "Long-term plan or strategic direction",
        "use_cases": ["戦略計画", "製品ロードマップ", "長期ビジョン", "product roadmap", "long-term vision"],
        "template": '<div class="roadmap">',
        "effectiveness": 8,
    },

    # D. Information organization (6)
    {
        "id": "bullet-list",
        "name": "Bullet List",
        "category": "information-organization",
        "description": "Line up key points",
        "use_cases": ["要点整理", "チェックリスト", "項目列挙", "key points", "takeaways"],
        "template": "- ポイント1\n- ポイント2",
        "effectiveness": 6,
    },
    {
        "id": "icon-text",
        "name": "Icon + Short Text",
        "category": "information-organization",
        "description": "Make concepts or elements easy to grasp",
        "use_cases": ["特徴説明", "サービス紹介", "機能一覧", "feature list", "service introduction"],
        "template": '<div class="icon-text-grid">',
        "effectiveness": 8,
    },
    {
        "id": "card-tile",
        "name": "Cards / Tiles",
        "category": "information-organization",
        "description": "Show several elements side by side",
        "use_cases": ["商品紹介", "サービス一覧", "機能比較", "product lineup", "service catalog"],
        "template": '<div class="card-grid">',
        "effectiveness": 8,
    },
    {
        "id": "checklist",
        "name": "Checklist",
        "category": "information-organization",
        "description": "Items to confirm or requirements",
        "use_cases": ["確認項目", "要件一覧", "タスクリスト", "requirements list", "task list"],
        "template": "- [ ] 項目1\n- [x] 項目2",
        "effectiveness": 7,
    },
    {
        "id": "faq",
        "name": "FAQ",
        "category": "information-organization",
        "description": "Answer common questions",
        "use_cases": ["Q&A", "疑問解決", "トラブルシューティング", "troubleshooting"],
        "template": "<details><summary>Q: 質問</summary>A: 回答</details>",
        "effectiveness": 7,
    },
    {
        "id": "table",
        "name": "Table",
        "category": "information-organization",
        "description": "Compare or organize many items",
        "use_cases": ["機能比較", "価格表", "スペック一覧", "price table", "spec sheet"],
        "template": "| 項目 | 値1 | 値2 |\n|------|-----|-----|",
        "effectiveness": 7,
    },

    # E. Emotional and experiential (3)
    {
        "id": "photo-visual",
        "name": "Photo / Visual",
        "category": "emotional-experiential",
        "description": "Convey the real thing or an atmosphere",
        "use_cases": ["商品紹介", "事例紹介", "雰囲気演出", "product showcase"],
        "template": "![bg](image.jpg)",
        "effectiveness": 9,
    },
    {
        "id": "storytelling",
        "name": "Storytelling",
        "category": "emotional-experiential",
        "description": "Success stories and project journeys",
        "use_cases": ["事例紹介", "体験談", "プロジェクト紹介", "case study", "customer story"],
        "template": "<!-- 起承転結構成 -->",
        "effectiveness": 9,
    },
    {
        "id": "quote-testimonial",
        "name": "Quote / Testimonial",
        "category": "emotional-experiential",
        "description": "Lend authority or credibility",
        "use_cases": ["お客様の声", "専門家コメント", "実績紹介", "customer testimonial", "expert opinion"],
        "template": '> "引用文"\n> — 出典',
        "effectiveness": 8,
    },
]

# =============================================================================
# FLOW TABLES
# =============================================================================

# Pattern id -> ids that read well as the *following* slide
PATTERN_COMPATIBILITY: Dict[str, List[str]] = {
    "number-emphasis": ["comparison", "dashboard", "progress-bar"],
    "comparison": ["number-emphasis", "table", "chart-graph"],
    "chart-graph": ["comparison", "dashboard", "timeline"],
    "dashboard": ["number-emphasis", "chart-graph", "progress-bar"],
    "steps": ["timeline", "flow-process", "checklist"],
    "timeline": ["steps", "roadmap", "storytelling"],
    "diagram-structure": ["matrix", "network", "org-tree"],
    "matrix": ["diagram-structure", "comparison", "dashboard"],
    "card-tile": ["icon-text", "table", "dashboard"],
    "icon-text": ["card-tile", "bullet-list", "checklist"],
    "photo-visual": ["storytelling", "quote-testimonial"],
    "storytelling": ["photo-visual", "timeline", "quote-testimonial"],
}

FALLBACK_PATTERNS: Dict[str, List[str]] = {
    "numerical-data": ["number-emphasis", "table", "bullet-list"],
    "structural-relationship": ["diagram-structure", "bullet-list", "table"],
    "temporal-flow": ["steps", "bullet-list", "table"],
    "information-organization": ["bullet-list", "table", "card-tile"],
    "emotional-experiential": ["photo-visual", "bullet-list", "quote-testimonial"],
}

# =============================================================================
# CLASSIFIER KEYWORDS
# =============================================================================

CONTENT_KEYWORDS: Dict[str, List[str]] = {
    "numerical-data": [
        "数値", "売上", "利益", "達成率", "KPI", "指標", "統計", "データ",
        "比較", "前年比", "成長率", "割合", "パーセント", "金額", "件数",
        "revenue", "profit", "metric", "statistic", "growth rate",
        "percentage", "year over year", "conversion rate", "budget",
    ],
    "structural-relationship": [
        "構造", "関係", "組織", "システム", "階層", "分類", "体系",
        "相互", "影響", "ネットワーク", "接続", "依存", "関連性",
        "architecture", "hierarchy", "relationship", "dependency",
        "component", "topology", "taxonomy", "org chart",
    ],
    "temporal-flow": [
        "手順", "ステップ", "プロセス", "流れ", "順序", "段階",
        "時系列", "タイムライン", "履歴", "経過", "推移", "ロードマップ",
        "step", "phase", "timeline", "roadmap", "milestone",
        "workflow", "sequence", "schedule",
    ],
    "information-organization": [
        "一覧", "リスト", "項目", "要点", "整理", "分類", "比較",
        "チェック", "確認", "要件", "FAQ", "質問", "回答",
        "checklist", "requirement", "inventory", "catalog",
        "question", "answer", "key points", "glossary",
    ],
    "emotional-experiential": [
        "事例", "体験", "ストーリー", "物語", "感情", "印象",
        "写真", "画像", "証言", "引用", "お客様", "実績",
        "case study", "story", "testimonial", "experience",
        "customer", "photo", "emotion", "journey",
    ],
}
