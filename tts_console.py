# tts_console.py
"""
Line-driven front-end for the speech proxy.

Plain lines set the text; commands:
    /lang <code>    switch language (voice resets, sample text loaded)
    /voice <id>     pick a voice
    /voices         list voices for the current language
    /play           play the fetched audio
    /status         show controller state
    /quit           exit
"""
import sys

import config
from main_app import configure_logging, load_catalog
from services.debounced_client import ClientState, DebouncedSynthesisClient
from services.playback import PlaybackController
from services.tts_client import SpeechProxyClient


def describe(client):
    """One status line for the current client state"""
    if client.state == ClientState.COUNTING_DOWN:
        return f"{client.countdown}秒後にデータ取得開始..."
    if client.state == ClientState.FETCHING:
        return "音声データを準備中..."
    if client.state == ClientState.ERROR:
        return f"音声エラー: {client.last_error}"
    if client.state == ClientState.READY:
        line = "準備完了 (/play で再生)"
        if client.show_phonetic and client.phonetic:
            line += f"\nピンイン: {client.phonetic}"
        return line
    return "待機中"


def handle_line(line, client, player, out=print):
    """Apply one input line. Returns False when the session should end."""
    line = line.rstrip("\n")
    if not line.startswith("/"):
        client.set_text(line)
        return True

    command, _, arg = line.partition(" ")
    arg = arg.strip()

    if command == "/quit":
        return False
    if command == "/lang":
        if not client.catalog.voices(arg):
            out(f"Unknown language: {arg} (choose from {', '.join(client.catalog.languages())})")
        else:
            client.set_language(arg, use_sample_text=True)
            out(f"言語: {client.language} / 話者: {client.voice}")
    elif command == "/voice":
        if not client.catalog.contains(client.language, arg):
            out(f"Unknown voice for {client.language}: {arg}")
        else:
            client.set_voice(arg)
    elif command == "/voices":
        for v in client.available_voices:
            marker = "*" if v.id == client.voice else " "
            out(f"{marker} {v.id}  {v.display}")
    elif command == "/play":
        if not client.can_play:
            out("再生できる音声がありません")
        elif player.play(client.audio):
            out("再生中...")
            player.wait()
    elif command == "/status":
        out(describe(client))
    else:
        out(f"Unknown command: {command}")
    return True


def main(argv=None):
    configure_logging(None, config.LOG_LEVEL)

    catalog = load_catalog(config.VOICE_CATALOG_FILE, config.FALLBACK_VOICE)

    proxy = SpeechProxyClient(config.TTS_PROXY_URL)
    player = PlaybackController(config.TTS_PLAYER_COMMAND)

    def on_change(c):
        if c.state in (ClientState.READY, ClientState.ERROR):
            print(describe(c))

    client = DebouncedSynthesisClient(
        catalog,
        fetch=proxy.fetch,
        quiescence=config.TTS_DEBOUNCE_SECONDS,
        on_state_change=on_change,
    )
    client.set_language(argv[0] if argv else "ja-JP", use_sample_text=True)
    print(__doc__)
    print(f"テキスト: {client.text}")

    try:
        for line in sys.stdin:
            if not handle_line(line, client, player):
                break
    except KeyboardInterrupt:
        pass
    finally:
        client.close()
        player.close()


if __name__ == '__main__':
    main(sys.argv[1:])
