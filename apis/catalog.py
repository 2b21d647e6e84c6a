import requests


def download_file(url: str, output_path: str, timeout: float = 60.0) -> bool:
    """
    Download ``url`` to ``output_path`` in chunks.

    Args:
        url (str): file URL
        output_path (str): destination path
        timeout (float): seconds to wait for the server

    Returns:
        bool: True on success, False on any request error
    """
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(output_path, "wb") as f:
                for block in response.iter_content(chunk_size=1 << 16):
                    if block:
                        f.write(block)
        return True
    except requests.exceptions.RequestException as e:
        print(f"Failed to download {url}: {e}")
        return False
