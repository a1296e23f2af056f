"""設定檔載入與基本驗證."""

import json
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = "screen-sync.config.json"

# 已知有效的頂層欄位
_KNOWN_TOP_KEYS = {"source", "components", "editor", "watch"}

# 各區塊已知欄位（用於拼字提示）
_KNOWN_SECTION_KEYS = {
    "source": {"screensDir", "extension"},
    "components": {"vocabulary", "idPrefix"},
    "editor": {"eventPrefix"},
    "watch": {"debounce"},
}

_VALID_EXTENSIONS = {".jsx", ".tsx", ".js"}


def _warn(msg: str) -> None:
    print(f"   ⚠️  [config] {msg}")


def validate_config(cfg: dict) -> None:
    """對 config 做基本欄位驗證，印出警告但不拋例外。"""
    if not cfg:
        return

    # 頂層未知欄位
    for key in cfg:
        if key not in _KNOWN_TOP_KEYS:
            known = ", ".join(sorted(_KNOWN_TOP_KEYS))
            _warn(f"未知頂層欄位 '{key}'（已知欄位：{known}）")

    # 各區塊欄位
    for section, known_keys in _KNOWN_SECTION_KEYS.items():
        section_cfg = cfg.get(section, {})
        if not isinstance(section_cfg, dict):
            _warn(f"[{section}] 應為 JSON 物件，目前是 {type(section_cfg).__name__}")
            continue
        for key in section_cfg:
            if key not in known_keys:
                known = ", ".join(sorted(known_keys))
                _warn(f"[{section}] 未知欄位 '{key}'（已知欄位：{known}）")

    # source.extension 值驗證
    extension = _section(cfg, "source").get("extension")
    if extension and extension not in _VALID_EXTENSIONS:
        valid = ", ".join(sorted(_VALID_EXTENSIONS))
        _warn(f"source.extension '{extension}' 不在已知值中（{valid}）")

    # components.vocabulary：typeTag → tag
    vocabulary = _section(cfg, "components").get("vocabulary")
    if vocabulary is not None:
        if not isinstance(vocabulary, dict):
            _warn("components.vocabulary 應為物件（typeTag → tag）")
        else:
            for type_tag, tag in vocabulary.items():
                if not isinstance(tag, str) or not tag:
                    _warn(f"components.vocabulary['{type_tag}'] 應為非空字串")

    prefix = _section(cfg, "editor").get("eventPrefix")
    if prefix is not None and (not isinstance(prefix, str) or not prefix):
        _warn("editor.eventPrefix 應為非空字串")

    # watch.debounce 值類型
    debounce = _section(cfg, "watch").get("debounce")
    if debounce is not None and (isinstance(debounce, bool) or not isinstance(debounce, (int, float))):
        _warn(f"watch.debounce 應為數字，目前是 {type(debounce).__name__}")


def _section(cfg: dict, name: str) -> dict:
    section = cfg.get(name, {})
    return section if isinstance(section, dict) else {}


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """載入 JSON 設定檔，不存在則回傳空 dict；存在則做基本驗證。"""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        try:
            cfg: Any = json.load(f)
        except json.JSONDecodeError as e:
            print(f"   ⚠️  [config] '{config_path}' 不是合法 JSON（{e}），回傳空設定。")
            return {}
    if not isinstance(cfg, dict):
        print(f"   ⚠️  [config] '{config_path}' 格式錯誤，應為 JSON 物件，回傳空設定。")
        return {}
    validate_config(cfg)
    return cfg
