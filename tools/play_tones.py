import sys
import time

from alerts.stages import SoundKind
from audio_io import init_audio_output


def main():
    volume = float(sys.argv[1]) if len(sys.argv) > 1 else 0.5
    pa, output = init_audio_output(44100)
    if not output:
        print("No audio output available")
        return
    for kind in SoundKind:
        print(f"Playing {kind.value}...")
        output.play(kind.value, 900, volume)
        time.sleep(1.2)
    output.close()
    pa.terminate()


if __name__ == "__main__":
    main()
