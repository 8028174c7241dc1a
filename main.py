# main.py
import sys, os
sys.path.append(os.path.dirname(__file__))

from utils.crashlog import setup_crashlog, log_exception, log_dir, run_logged

import argparse, logging
from config import AppConfig, PlaybackConfig, MusicModeConfig
from notes.errors import AnalysisError
from notes.loader import JsonSongAnalyzer, read_song_file
from notes.transform import TransformSettings
from midi.export import export_song
from midi.parser import parse_event_file

def _init_logging():
    logs = log_dir()
    log_path = os.path.join(logs, "app.log")

    if logging.getLogger().handlers:
        return

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        encoding="utf-8"
    )
    from logging.handlers import RotatingFileHandler
    try:
        fh = RotatingFileHandler(log_path, maxBytes=2*1024*1024, backupCount=3, encoding="utf-8")
    except OSError:
        logging.warning("file logging disabled: cannot open %s", log_path)
        return
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    logging.getLogger().addHandler(fh)

def _progress(pct: int):
    logging.info("Analyzing song... %d%%", pct)

def _analyze(path: str):
    name = os.path.splitext(os.path.basename(path))[0]
    return run_logged(JsonSongAnalyzer(default_name=name).analyze(read_song_file(path), _progress))

def cmd_export(args, cfg: AppConfig) -> int:
    song = _analyze(args.song)
    ev = export_song(song, TransformSettings(args.transpose), cfg.export)
    path = ev.save(args.out)
    print(f"[export] {len(song.notes)} notes -> {path}")
    return 0

def cmd_inspect(args, cfg: AppConfig) -> int:
    notes, total = parse_event_file(args.midi)
    for n in notes:
        print(f"{n.start:8.3f}s  {n.end:8.3f}s  pitch={n.pitch:3d}  vel={n.velocity:3d}  ch={n.channel}")
    print(f"[inspect] notes={len(notes)} length={total:.3f}s")
    return 0

def cmd_play(args, cfg: AppConfig) -> int:
    from app import App
    app = App(cfg, out_dir=args.out)
    media = None
    if args.audio:
        from audio.media import MixerMedia
        media = MixerMedia(args.audio)
    name = os.path.splitext(os.path.basename(args.song))[0]
    try:
        run_logged(app.session.load_song(JsonSongAnalyzer(default_name=name),
                                         read_song_file(args.song), media=media, on_progress=_progress))
    except AnalysisError:
        app.close()
        raise
    app.run()
    return 0

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="keysync", description="Play along with an analyzed song; export it as MIDI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("play", help="open the keyboard window")
    p.add_argument("song", help="analyzed song document (.json)")
    p.add_argument("--audio", default=None, help="audio file to follow (omit for silent mode)")
    p.add_argument("--silent", action="store_true")
    p.add_argument("--speed", type=float, default=1.0)
    p.add_argument("--transpose", type=int, default=0)
    p.add_argument("--no-timeline", action="store_true")
    p.add_argument("--out", default=".", help="directory for exports and recordings")
    p.set_defaults(func=cmd_play)

    p = sub.add_parser("export", help="write the song as a .mid file")
    p.add_argument("song")
    p.add_argument("--transpose", type=int, default=0)
    p.add_argument("--out", default=".")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("inspect", help="list the notes of a .mid file")
    p.add_argument("midi")
    p.set_defaults(func=cmd_inspect)
    return ap

def main(argv=None) -> int:
    setup_crashlog()
    _init_logging()
    logging.info("Application start")

    args = build_parser().parse_args(argv)
    cfg = AppConfig(
        playback=PlaybackConfig(speed=getattr(args, "speed", 1.0), silent=getattr(args, "silent", False)),
        music=MusicModeConfig(
            transposition=getattr(args, "transpose", 0),
            timeline_enabled=not getattr(args, "no_timeline", False),
        ),
    )
    try:
        return args.func(args, cfg)
    except AnalysisError as e:
        log_exception("analysis", e)
        logging.error("Failed to analyze song: %s", e)
        print("Failed to analyze song. Ensure it is a valid song document.", file=sys.stderr)
        return 2

if __name__ == '__main__':
    sys.exit(main())
