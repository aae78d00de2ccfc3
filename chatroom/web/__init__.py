"""HTTP requests, responses, contexts and routing."""