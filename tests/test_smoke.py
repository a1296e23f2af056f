"""
Smoke tests：驗證套件可匯入、版本與公開 API 存在。
"""


def test_import_package():
    """套件可正常匯入"""
    import screen_sync
    assert screen_sync.__version__ == "0.1.0"


def test_public_api():
    """公開 API 可從 screen_sync 取得"""
    from screen_sync import (
        __version__,
        parse,
        print_tree,
        find_by_id,
        merge_properties,
        extract_properties,
        discover_components,
        ScreenCollection,
        SyncCoordinator,
        Provenance,
        load_config,
    )
    assert __version__ == "0.1.0"
    assert callable(parse)
    assert callable(print_tree)
    assert callable(find_by_id)
    assert callable(merge_properties)
    assert callable(extract_properties)
    assert callable(discover_components)
    assert callable(load_config)
    assert len(ScreenCollection()) == 1
    assert Provenance.TEXT_EDITOR.value == "text-editor"
    assert SyncCoordinator().source_text.startswith("export default function Home()")
