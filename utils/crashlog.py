# utils/crashlog.py
import os, sys, faulthandler, datetime, traceback, threading, asyncio

_fault_file = None

def log_dir() -> str:
    d = os.environ.get("KEYSYNC_LOG_DIR") or os.path.join(os.getcwd(), "logs")
    os.makedirs(d, exist_ok=True)
    return d

def _new_log_path(prefix: str = "crash") -> str:
    stamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
    return os.path.join(log_dir(), f"{prefix}-{stamp}.txt")

def _write_report(prefix: str, title: str, exc_type, exc, tb):
    with open(_new_log_path(prefix), "w", encoding="utf-8") as out:
        out.write(title + "\n")
        out.write("=" * 60 + "\n")
        traceback.print_exception(exc_type, exc, tb, file=out)

def setup_crashlog():
    """Route native faults, uncaught exceptions and thread crashes to logs/."""
    global _fault_file
    if _fault_file is None:
        try:
            _fault_file = open(_new_log_path("native"), "w", encoding="utf-8")
            faulthandler.enable(_fault_file, all_threads=True)
        except OSError:
            _fault_file = None

    def _hook(exc_type, exc, tb):
        try:
            _write_report("crash", "UNCAUGHT EXCEPTION", exc_type, exc, tb)
        finally:
            sys.__excepthook__(exc_type, exc, tb)
    sys.excepthook = _hook

    def _thread_hook(args):
        _hook(args.exc_type, args.exc_value, args.exc_traceback)
    threading.excepthook = _thread_hook

def log_exception(title: str, exc: BaseException) -> str:
    path = _new_log_path("error")
    with open(path, "w", encoding="utf-8") as out:
        out.write(f"[{title}] {type(exc).__name__}: {exc}\n")
        out.write("Traceback:\n")
        out.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return path

def install_async_handler(loop: asyncio.AbstractEventLoop):
    """Write unhandled asyncio errors to logs/ before the loop's default handling."""
    def _async_handler(loop, context):
        exc = context.get("exception")
        try:
            if exc is not None:
                _write_report("async", "ASYNCIO EXCEPTION", type(exc), exc, exc.__traceback__)
            else:
                with open(_new_log_path("async"), "w", encoding="utf-8") as out:
                    out.write("ASYNCIO ERROR\n")
                    out.write(str(context.get("message", context)) + "\n")
        finally:
            loop.default_exception_handler(context)
    loop.set_exception_handler(_async_handler)

def run_logged(coro):
    """asyncio.run() with the crash-log handler installed on the new loop."""
    async def _main():
        install_async_handler(asyncio.get_running_loop())
        return await coro
    return asyncio.run(_main())
